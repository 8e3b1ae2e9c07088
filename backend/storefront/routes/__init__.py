# Routes package init
"""
Storefront Backend — API Routes Package
=========================================

Route Inventory:
    - catalog.py:     GET /categories, /categories/{id}
                      GET /products,   /products/{id}
                      GET /services,   /services/{id}
    - pages.py:       GET/POST /pages, GET/PUT/DELETE /pages/{slug}
    - settings.py:    GET/PUT /settings/branding
    - email_logs.py:  GET /email-logs, GET /email-logs/{logId},
                      POST /email-logs/resend
    - health.py:      GET /health

Handlers stay thin: they pull parameters out of the request, call one service
method and return its result. Services raise the application exceptions that
main.py turns into status codes.
"""
