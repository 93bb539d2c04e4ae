import os
from dotenv import load_dotenv

load_dotenv()

DB_DIR = os.getenv('DB_DIR', os.path.join(os.path.dirname(os.path.abspath(__file__)), 'databases'))


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database paths
    DB_DIR = DB_DIR
    BLOCKS_DB = os.path.join(DB_DIR, 'blocks.db')
    LOGS_DB = os.path.join(DB_DIR, 'app_logs.db')

    PORT = int(os.getenv('PORT', '5000'))
