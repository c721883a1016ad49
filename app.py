"""
Portfolio Admin server
======================

Run with:
    python app.py

Or through the Flask CLI:
    flask --app app run
    flask --app app create-admin alice --name "Alice"
    flask --app app import-csv projects.csv
    flask --app app export-csv projects.csv

Visit:
    http://localhost:5000/health        - Health check
    http://localhost:5000/api/public/portfolios
"""

import logging

from portfolio_admin import create_app
from portfolio_admin.core.config import Config

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

app = create_app()


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Portfolio Admin")
    print("=" * 60)
    print(f"Health:          http://localhost:{Config.port}/health")
    print(f"API:             http://localhost:{Config.port}/api/portfolios")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
