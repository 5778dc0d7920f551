# Routes package init
"""
NotaryPro Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:           /api/auth/login, /api/auth/logout, /api/auth/me
    - documents.py:      /api/documents[...] (create, list, pending, detail,
                         submit, cancel, certify, public QR validation)
    - identity.py:       /api/verify-identity
    - pos_locations.py:  /api/pos-locations
    - commissions.py:    /api/commissions, /api/admin/commissions/...
    - notifications.py:  /api/notifications
    - analytics.py:      /api/analytics/{documents,commissions,users}
    - admin.py:          /api/admin/users
    - health.py:         /health

Routes are thin: extract the request data, call a service, shape the
response. Business rules live in services.
"""
