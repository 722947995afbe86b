"""
Services module for business logic.

This module organizes services into:
- schedule_service / script_service / upload_service: per-user CRUD and ingestion
- pick_ledger_service: picks, settlement, statistics and bankroll history
- dashboard_service: tab summary and workflow readiness
- analysis: prompt building and model-output normalisation (CIS, script execution)
- llm: the chat-completion HTTP client
"""
