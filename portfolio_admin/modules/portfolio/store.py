"""
Record-storage services
=======================

The importer only needs two operations from whoever owns portfolio
records: the existing project names, and "create this one". Both the
in-process SQLite layer and a remote Portfolio Admin server satisfy that.
"""

import requests

from . import database as portfolio_database


class PortfolioStoreError(Exception):
    """A create/list call failed. status is the HTTP status, or None for network failures."""

    def __init__(self, status, message=None):
        super().__init__(message or f"Storage error ({status})")
        self.status = status
        self.message = message


class LocalPortfolioStore:
    """Writes straight to the portfolio database of the current app."""

    def list_project_names(self):
        return portfolio_database.list_project_names()

    def create(self, payload):
        try:
            return portfolio_database.create_portfolio(payload)
        except portfolio_database.PortfolioError as e:
            raise PortfolioStoreError(e.status, str(e))


class RemotePortfolioStore:
    """Talks to /api/portfolios of another instance with a bearer token."""

    def __init__(self, base_url, token=None, timeout=15, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    @staticmethod
    def _error_message(response):
        try:
            body = response.json()
        except ValueError:
            return response.text or None
        if isinstance(body, dict):
            return body.get('message') or body.get('error')
        return None

    def _request(self, method, path, **kwargs):
        try:
            response = self.session.request(method, f"{self.base_url}{path}",
                                            timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PortfolioStoreError(None, f"Network error: {e}")

        if not response.ok:
            raise PortfolioStoreError(response.status_code, self._error_message(response))
        return response

    def list_project_names(self):
        response = self._request('GET', '/api/portfolios')
        return [p.get('projectName') or '' for p in response.json()]

    def create(self, payload):
        response = self._request('POST', '/api/portfolios', json=payload)
        body = response.json()
        return body.get('portfolio', body)
