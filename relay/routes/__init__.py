from flask import current_app, request

from relay.errors import ValidationError


def get_service():
    return current_app.extensions['phonepe_service']


def get_client():
    return current_app.extensions['phonepe_client']


def get_json_object():
    """Request body as a dict; JSON lists or scalars are rejected with 400."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
