"""
Portfolio Admin Modules
=======================

Feature modules, each exposing a Flask blueprint:
auth, portfolio, taxonomy, public, uploads, ops.
"""
