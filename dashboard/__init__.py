"""
Dashboard — The Mirror

Client-side state engine for the service registry dashboard.
Responsibilities:
- Keep an in-memory mirror of registered service instances
- Poll the registry on demand or on a timer (auto refresh)
- Apply optimistic updates after register/deregister/heartbeat/rate-limit/virtual-domain calls
- Derive statistics and filtered views for rendering
- Emit transient notifications for every outcome
"""
