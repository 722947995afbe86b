"""
API routes, all mounted under /api/v1.

- auth: session login/logout
- schedules, scripts, uploads: per-user data management
- analysis: injury check, CIS generation, betting-script execution
- picks: pick ledger and bankroll history
- dashboard: tab summary and workflow readiness
"""
