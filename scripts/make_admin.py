"""Create or update a back-office admin account.

Usage: python scripts/make_admin.py admin@example.com 'a strong password'
"""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from academy import create_app
from academy.extensions import db
from academy.models import AdminUser

if len(sys.argv) != 3:
    print(__doc__)
    sys.exit(1)

email = sys.argv[1].strip().lower()
password = sys.argv[2]

app = create_app()
with app.app_context():
    user = AdminUser.query.filter_by(email=email).first()

    if not user:
        user = AdminUser(email=email, password_hash=generate_password_hash(password))
        db.session.add(user)
        print("New admin user created")
    else:
        user.password_hash = generate_password_hash(password)
        user.is_active_account = True
        print("Existing admin password updated")

    db.session.commit()
