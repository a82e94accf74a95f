"""
Proximity-aware cafe discovery engine.

Responsibilities:
- Pick one search strategy per request (text, nearby, filtered, popular).
- Query the injected record store and order results per strategy.
- Relax filters when a filtered first page comes back short.
- Attach tag report counts to each result and paginate.
"""
