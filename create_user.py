import sys

from dotenv import load_dotenv

load_dotenv()

from workoutlogger import create_app
from workoutlogger.extensions import db
from workoutlogger.services import AuthGateway

app = create_app()

with app.app_context():
    if len(sys.argv) != 3:
        print("Usage: python create_user.py USERNAME PASSWORD")
        sys.exit(2)

    username, password = sys.argv[1], sys.argv[2]

    gateway = AuthGateway(db.session, app.config)
    # If the username is taken or the password is weak, nothing is added
    if gateway.find_user(username):
        print(f"⚠️ User '{username}' already exists.")
        sys.exit(1)

    _, error = gateway.register(username, password)
    if error:
        print(f"⚠️ {error.msg}")
        sys.exit(1)

    print("✅ User created successfully!")
    print(f"👤 Username: {username}")
