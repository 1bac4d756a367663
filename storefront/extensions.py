from flask import current_app
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def get_store():
    return current_app.extensions["storefront"]["store"]


def get_auth():
    return current_app.extensions["storefront"]["auth"]
