# Services package init
"""
NotaryPro Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and repositories (persistence).
How:   Services are stateless singletons. Each call receives the request's
       AsyncSession, so a workflow step and its side effects (commission,
       notifications) commit or roll back together.

Service Inventory:
    - CertificationWorkflow: document lifecycle state machine
    - DocumentService: creation, access-checked reads, QR validation
    - CommissionService: revenue split, payout state, aggregates
    - NotificationService: best-effort inbox delivery with retries
    - IdentityVerifier (abstract) / SimulatedIdentityVerifier: RUT checks
    - PosLocationService: points of sale
    - UserService: login/logout, user management, bootstrap superadmin
    - AnalyticsService: dashboard aggregates
"""
