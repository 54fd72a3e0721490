import os

from config import Config, SandboxConfig
from relay import create_app

# Crear la aplicación primero
config_class = SandboxConfig if os.getenv('PHONEPE_ENV') == 'sandbox' else Config
app = create_app(config_class)

if __name__ == "__main__":
    port = app.config.get('PORT', 3001)
    print("🚀 Iniciando relay de pagos PhonePe...")
    print(f"🌐 Ambiente PhonePe: {app.config.get('PHONEPE_ENV')}")
    print(f"🌐 Servidor ejecutándose en: http://localhost:{port}")
    app.run(host="0.0.0.0", port=port, threaded=True)
