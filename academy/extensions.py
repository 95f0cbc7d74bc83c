"""
Flask Extensions

Admin sign-in is a two-step flow (password, then an emailed code); Flask-Login
only holds the admin account once the second step has succeeded.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail

# Database instance
db = SQLAlchemy()

# Login manager for the admin back office
login_manager = LoginManager()

# SMTP transport (used when SendGrid is not configured)
mail = Mail()
