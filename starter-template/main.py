"""
My Smart Blocks Site
====================

Flask app serving the Smart Blocks API.

Run with:
    python main.py

Visit:
    http://localhost:5000/api/blocks          - Block listing
    http://localhost:5000/api/blocks/options  - Categories and colours
"""

import os
from flask import Flask, jsonify

# ===== App Setup =====

app = Flask(__name__)

# Load config
from config import Config
app.config['SECRET_KEY'] = Config.SECRET_KEY
app.config['DB_DIR'] = Config.DB_DIR
app.config['BLOCKS_DB'] = Config.BLOCKS_DB
app.config['LOGS_DB'] = Config.LOGS_DB

# Session security
app.config['SESSION_COOKIE_SECURE'] = not app.debug
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

# Ensure database directory exists
os.makedirs(Config.DB_DIR, exist_ok=True)

# ===== Smart Blocks =====

from smartblocks import SmartBlocks
smartblocks = SmartBlocks(app)


# ===== Routes =====

@app.route('/health')
def health():
    return jsonify({'status': 'ok', 'modules': smartblocks.get_registered_modules()})


@app.route('/')
def home():
    """Index of the available API endpoints"""
    print("[STARTER] Home page loaded")
    return jsonify({
        'name': 'Smart Blocks',
        'endpoints': {
            'blocks': '/api/blocks',
            'stats': '/api/blocks/stats',
            'options': '/api/blocks/options',
        },
    })


# ===== Run =====

if __name__ == '__main__':
    print(f"[STARTER] Starting on port {Config.PORT}...")
    app.run(debug=True, port=Config.PORT, host='0.0.0.0')
