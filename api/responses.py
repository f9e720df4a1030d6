from flask import jsonify


def generate_response(status_code: int, message: str, data=None, **extra):
    """Uniform envelope: {status, statusCode, message, data}."""
    payload = {
        "status": 200 <= status_code < 300,
        "statusCode": status_code,
        "message": message,
        "data": data,
    }
    payload.update(extra)
    return jsonify(payload), status_code
