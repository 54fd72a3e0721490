# relay/routes/webhooks.py
import logging

from flask import Blueprint, current_app, jsonify, redirect, request

from relay.Services.phonepe_service import (
    extract_merchant_order_id,
    extract_payment_state,
    is_successful,
)

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint('webhooks', __name__)


@webhooks_bp.route('/payment-callback', methods=['POST'])
def payment_callback():
    payment_status = request.get_json(silent=True) or request.form.to_dict()
    state = extract_payment_state(payment_status)
    order_id = extract_merchant_order_id(payment_status)

    if is_successful(state):
        logger.info("Payment successful for order: %s", order_id)
        return redirect(current_app.config['PAYMENT_SUCCESS_URL'])

    logger.info("Payment failed for order: %s (state=%s)", order_id, state)
    return redirect(current_app.config['PAYMENT_FAILURE_URL'])


@webhooks_bp.route('/webhook', methods=['POST'])
def webhook():
    """Acknowledge a PhonePe server-to-server notification."""
    body = request.get_json(silent=True)
    logger.info("Webhook received: order=%s state=%s",
                extract_merchant_order_id(body), extract_payment_state(body))
    return jsonify({'success': True, 'message': 'Webhook received successfully'})
