# Overview: WSGI entry point (FLASK_APP=wsgi.py, or gunicorn wsgi:app).

from carniceria import create_app, start_background_jobs

app = create_app()
start_background_jobs(app)
