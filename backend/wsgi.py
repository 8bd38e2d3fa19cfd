# backend/wsgi.py
from docdesk import create_app

app = create_app()
