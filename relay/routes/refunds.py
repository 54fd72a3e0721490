# relay/routes/refunds.py
from flask import Blueprint, jsonify

from relay.routes import get_json_object, get_service

refunds_bp = Blueprint('refunds', __name__)


@refunds_bp.route('/refund', methods=['POST'])
@refunds_bp.route('/initiate-refund', methods=['POST'])
def initiate_refund():
    data = get_json_object()
    merchant_order_id = data.get('merchantOrderId')
    if not merchant_order_id:
        return jsonify({'success': False, 'message': 'merchantOrderId is required'}), 400

    amount = data.get('amount', data.get('refundAmount'))
    refund_id, response = get_service().create_refund(
        merchant_order_id,
        amount,
        refund_id=data.get('refundId'),
        reason=data.get('reason'),
    )
    return jsonify({'success': True, 'refundId': refund_id, 'data': response})


@refunds_bp.route('/refund-status/<refund_id>', methods=['GET'])
def refund_status(refund_id):
    response = get_service().refund_status(refund_id)
    return jsonify({'success': True, 'data': response})
