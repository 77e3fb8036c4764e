"""Match game domain services: the engine, its session driver and timers.

The engine is pure; HTTP routes and socket handlers only talk to it through
``MatchSession`` so transport concerns stay out of game mechanics.
"""
