"""
Wager Desk: league schedules, betting scripts, LLM match analysis and a
pick ledger with bankroll tracking.
"""
