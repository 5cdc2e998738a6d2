"""
Persistence module.

Durable key-value settings store and the snapshot repository that maps
ChallengeState onto it.
"""
