"""
Idle dungeon crawler engine.

A party of five fights its way down an endless dungeon on its own: a single
tick scheduler drives attack timers, skills, rewards and floor progression,
and every event is recorded in a bounded, ordered log.
"""
