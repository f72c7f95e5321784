"""Web package for the conference service.

This package contains the FastAPI application factory and the JSON API
routes for paper submission, reviewer assignment, dashboards and
conference management.

To start the web server from the CLI use:
    econf serve --port 8000 --reload
"""
