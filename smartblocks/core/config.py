import os
from dotenv import load_dotenv

load_dotenv()


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    """
    Base configuration for Smart Blocks.
    Projects should provide database paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    BLOCKS_DB = os.getenv('BLOCKS_DB', os.path.join(DB_DIR, "blocks.db"))
    LOGS_DB = os.getenv('LOGS_DB', os.path.join(DB_DIR, "app_logs.db"))

    # Table names
    BLOCKS_TABLE = "blocks"
    LOGS_TABLE = "app_logs"

    # Listing
    BLOCKS_DEFAULT_LIMIT = int(os.getenv('BLOCKS_DEFAULT_LIMIT', '50'))
    BLOCKS_MAX_LIMIT = int(os.getenv('BLOCKS_MAX_LIMIT', '100'))

    # Origins allowed to call the blocks API from the browser
    CORS_ORIGINS = _split_origins(os.getenv('SMARTBLOCKS_CORS_ORIGINS', 'http://localhost:3000'))

    # Where the client store finds the blocks API
    API_URL = os.getenv('SMARTBLOCKS_API_URL', 'http://localhost:5000/api/blocks')

    # Port for local server (optional, projects can set this)
    port = int(os.getenv('PORT', '5000'))


CATEGORIES = (
    'Technology',
    'E-Commerce',
    'Education',
    'Health & Fitness',
    'Finance',
    'Entertainment',
)

# Sentinel for "no category filter" in the browse views
ALL_CATEGORIES = 'All'

COLORS = (
    'bg-red-500',
    'bg-blue-500',
    'bg-green-500',
    'bg-yellow-500',
    'bg-purple-500',
    'bg-orange-500',
    'bg-pink-500',
    'bg-indigo-500',
)

# Cosmetic palette consumed by view components; not used by any logic
COLOR_THEMES = {
    'bg-red-500': {'name': 'Red', 'hex': '#ef4444', 'gradient': ['#f87171', '#dc2626']},
    'bg-blue-500': {'name': 'Blue', 'hex': '#3b82f6', 'gradient': ['#60a5fa', '#2563eb']},
    'bg-green-500': {'name': 'Green', 'hex': '#22c55e', 'gradient': ['#4ade80', '#16a34a']},
    'bg-yellow-500': {'name': 'Yellow', 'hex': '#eab308', 'gradient': ['#facc15', '#ca8a04']},
    'bg-purple-500': {'name': 'Purple', 'hex': '#a855f7', 'gradient': ['#c084fc', '#9333ea']},
    'bg-orange-500': {'name': 'Orange', 'hex': '#f97316', 'gradient': ['#fb923c', '#ea580c']},
    'bg-pink-500': {'name': 'Pink', 'hex': '#ec4899', 'gradient': ['#f472b6', '#db2777']},
    'bg-indigo-500': {'name': 'Indigo', 'hex': '#6366f1', 'gradient': ['#818cf8', '#4f46e5']},
}
