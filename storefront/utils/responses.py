from flask import jsonify


def ok(data=None, code=200):  return jsonify(data or {}), code
def err(msg, code=400):       return jsonify({"error": msg}), code


def no_content():
    return "", 204
