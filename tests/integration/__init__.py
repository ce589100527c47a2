"""
Integration Tests Package

End-to-end flows through SkillGraphEngine on fake time.

TEST AXIOMS:
=============
1. Determinism: same records + seeds = same layout
2. Lifecycle: nothing mutates the graph after stop() or close()
3. Explicit failure: suggestion errors are Results, never silent
"""
