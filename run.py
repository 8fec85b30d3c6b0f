import os
import logging
from dotenv import load_dotenv

# Load .env before the config class reads the environment
dotenv_path = os.path.join(os.path.dirname(__file__), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path, override=True)

from shopnish import create_app
from extensions import db

logger = logging.getLogger('shopnish.run')

app = create_app()
logger.info(".env %s", "loaded" if os.path.exists(dotenv_path) else f"not found at {dotenv_path}")

# Create tables on startup (won't recreate existing tables; migrations handle changes)
with app.app_context():
    db.create_all()

if __name__ == '__main__':
    app.run()
