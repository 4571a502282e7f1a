import os
import logging
import click
from flask import Flask, jsonify, send_from_directory
from sqlalchemy.exc import SQLAlchemyError
from config import config_dict
from extensions import mail, migrate, cors
from models import db
from routes.authentication import auth_bp
from routes.instructors import instructor_bp
from routes.students import student_bp
from utils.badge_service import seed_badges


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(413)
    def file_too_large(error):
        return jsonify({"error": "File too large"}), 413

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        app.logger.exception("Database error")
        return jsonify({"error": "Server error", "details": str(error)}), 500


def create_app(env=None):
    env = env or os.environ.get("FLASK_ENV", "production")

    app = Flask(__name__)
    app.config.from_object(config_dict.get(env, config_dict["production"]))

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])
    app.logger.debug("Environment: %s", env)

    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    @app.route('/')
    def home():
        return "Welcome to the Quiz LMS API!"

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(instructor_bp, url_prefix='/api/instructor')
    app.register_blueprint(student_bp, url_prefix='/api/student')

    register_error_handlers(app)

    @app.cli.command("seed-badges")
    def seed_badges_command():
        """Insert the default badge catalogue."""
        added = seed_badges()
        click.echo(f"{added} badge(s) added")

    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'])
