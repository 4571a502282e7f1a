"""
Flask extensions that are not tied to the models package.
Bound to the app in create_app().
"""
from flask_cors import CORS
from flask_mail import Mail
from flask_migrate import Migrate

mail = Mail()
migrate = Migrate()
cors = CORS()
