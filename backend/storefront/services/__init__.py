# Services package init
"""
Storefront Backend — Services Layer
=====================================

What:  Everything between the HTTP routes and the stores (database, JSON files,
       SMTP relay).

Service Inventory:
    - CatalogService:   id lookups and listings for categories/products/services
    - PageStore:        file-backed page documents keyed by slug
    - BrandingService:  the branding settings document
    - MailService:      email sending, delivery log and resend
    - EmailLogFacade:   HTTP-facing wrapper over MailService
    - MailTransport:    delivery interface (SMTP in production)
    - error_boundary:   decorator translating unexpected failures into 500 errors

Each service exposes a module-level singleton and a get_* function that routes
take as a FastAPI dependency, so tests can swap instances through
app.dependency_overrides.
"""
