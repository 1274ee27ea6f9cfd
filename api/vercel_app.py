"""
Serverless entry point for the civic complaints API.
"""

import os
from app import create_app

# Serverless platforms look up the WSGI application as 'app'
app = create_app()

if __name__ == "__main__":
    app.run(debug=False, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
