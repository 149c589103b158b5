#!/usr/bin/env python3
"""
AI Code Reviewer Server

Runs the review trigger server (requires `pip install -e .`).
"""

import os

from ai_code_reviewer.config import load_config, setup_logging
from ai_code_reviewer.server import create_app


if __name__ == '__main__':
    config = load_config()
    setup_logging(config.logging)

    port = int(os.getenv("PORT", "8000"))
    print("🚀 Starting AI Code Reviewer Server...")
    print(f"📍 Server will be available at: http://localhost:{port}")
    print("📋 API Documentation:")
    print("   - Health Check: GET /api/v1/health")
    print("   - Review PR: POST /api/v1/reviews")

    app = create_app(config)
    app.run(
        host='0.0.0.0',
        port=port,
        debug=os.getenv("FLASK_DEBUG", "false").lower() == "true"
    )
