from .auth import bp as auth_bp
from .categories import bp as categories_bp
from .content import bp as content_bp
from .export import bp as export_bp
from .newsletter import bp as newsletter_bp
from .products import bp as products_bp

BLUEPRINTS = (products_bp, categories_bp, content_bp, newsletter_bp, auth_bp, export_bp)


def register_blueprints(app):
    for bp in BLUEPRINTS:
        app.register_blueprint(bp)
