import os
from dotenv import load_dotenv

load_dotenv()

# PhonePe endpoints por ambiente
PHONEPE_ENDPOINTS = {
    'production': {
        'auth_url': 'https://api.phonepe.com/apis/identity-manager/v1/oauth/token',
        'base_url': 'https://api.phonepe.com/apis/pg',
    },
    'sandbox': {
        'auth_url': 'https://api-preprod.phonepe.com/apis/pg-sandbox/v1/oauth/token',
        'base_url': 'https://api-preprod.phonepe.com/apis/pg-sandbox',
    },
}


def _optional_float(name):
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Server
    PORT = int(os.getenv('PORT', 3001))

    # Configuraciones de PhonePe API
    PHONEPE_ENV = os.getenv('PHONEPE_ENV', 'production')
    PHONEPE_CLIENT_ID = os.getenv('PHONEPE_CLIENT_ID') or os.getenv('PHONEPE_CLIENT_ID_PROD')
    PHONEPE_CLIENT_SECRET = os.getenv('PHONEPE_CLIENT_SECRET') or os.getenv('PHONEPE_CLIENT_SECRET_PROD')
    PHONEPE_CLIENT_VERSION = os.getenv('PHONEPE_CLIENT_VERSION', '1')
    PHONEPE_AUTH_URL = os.getenv('PHONEPE_AUTH_URL')
    PHONEPE_BASE_URL = os.getenv('PHONEPE_BASE_URL')

    # "O-Bearer" es el esquema de Standard Checkout v2; algunas integraciones usan "Bearer"
    PHONEPE_AUTH_SCHEME = os.getenv('PHONEPE_AUTH_SCHEME', 'O-Bearer')

    PHONEPE_REQUEST_TIMEOUT = float(os.getenv('PHONEPE_REQUEST_TIMEOUT', 10))
    PHONEPE_AUTH_TIMEOUT = _optional_float('PHONEPE_AUTH_TIMEOUT')
    PHONEPE_TOKEN_REFRESH_MARGIN = float(os.getenv('PHONEPE_TOKEN_REFRESH_MARGIN', 0))

    # Payment flow
    PAYMENT_EXPIRE_AFTER = int(os.getenv('PAYMENT_EXPIRE_AFTER', 900))  # 15 minutos
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'https://successmarathi.vercel.app')
    PAYMENT_REDIRECT_URL = os.getenv('PAYMENT_REDIRECT_URL', f'{FRONTEND_URL}/payment-callback')
    PAYMENT_SUCCESS_URL = os.getenv('PAYMENT_SUCCESS_URL', f'{FRONTEND_URL}/success')
    PAYMENT_FAILURE_URL = os.getenv('PAYMENT_FAILURE_URL', f'{FRONTEND_URL}/failure')

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', FRONTEND_URL)


class SandboxConfig(Config):
    PHONEPE_ENV = 'sandbox'
    PHONEPE_CLIENT_ID = os.getenv('PHONEPE_CLIENT_ID') or os.getenv('CLIENT_ID')
    PHONEPE_CLIENT_SECRET = os.getenv('PHONEPE_CLIENT_SECRET') or os.getenv('CLIENT_SECRET')
    PHONEPE_CLIENT_VERSION = os.getenv('PHONEPE_CLIENT_VERSION') or os.getenv('CLIENT_VERSION', '1')


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = 'DEBUG'
    PHONEPE_ENV = 'sandbox'
    PHONEPE_CLIENT_ID = 'test-client-id'
    PHONEPE_CLIENT_SECRET = 'test-client-secret'
    PHONEPE_CLIENT_VERSION = '1'
    PHONEPE_AUTH_URL = None
    PHONEPE_BASE_URL = None
    PHONEPE_AUTH_SCHEME = 'O-Bearer'
    PHONEPE_AUTH_TIMEOUT = None
    PHONEPE_TOKEN_REFRESH_MARGIN = 0
    FRONTEND_URL = 'https://merchant.example.com'
    PAYMENT_REDIRECT_URL = 'https://merchant.example.com/payment-callback'
    PAYMENT_SUCCESS_URL = 'https://merchant.example.com/success'
    PAYMENT_FAILURE_URL = 'https://merchant.example.com/failure'
    CORS_ORIGINS = 'https://merchant.example.com'


def resolve_endpoints(config):
    """Return (auth_url, base_url) honoring explicit overrides."""
    defaults = PHONEPE_ENDPOINTS.get(config.get('PHONEPE_ENV'), PHONEPE_ENDPOINTS['production'])
    auth_url = config.get('PHONEPE_AUTH_URL') or defaults['auth_url']
    base_url = config.get('PHONEPE_BASE_URL') or defaults['base_url']
    return auth_url, base_url.rstrip('/')
