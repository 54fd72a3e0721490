# relay/routes/payments.py
from flask import Blueprint, jsonify, request

from relay.routes import get_json_object, get_service

payments_bp = Blueprint('payments', __name__)

UDF_FIELDS = ('udf1', 'udf2', 'udf3', 'udf4', 'udf5')


@payments_bp.route('/initiate-payment', methods=['POST'])
def initiate_payment():
    data = get_json_object()
    service = get_service()

    meta_info = {key: data[key] for key in UDF_FIELDS if data.get(key)}
    merchant_order_id, response = service.create_payment(
        data.get('amount'),
        merchant_order_id=data.get('merchantOrderId'),
        meta_info=meta_info or None,
        message=data.get('message'),
    )

    return jsonify({
        'success': True,
        'merchantOrderId': merchant_order_id,
        'data': response,
    })


@payments_bp.route('/order-status/<merchant_order_id>', methods=['GET'])
def order_status(merchant_order_id):
    details = request.args.get('details', '').lower() in ('1', 'true', 'yes')
    response = get_service().order_status(merchant_order_id, details=details)
    return jsonify({'success': True, 'data': response})
