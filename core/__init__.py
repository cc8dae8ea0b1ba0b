"""
DripCoin Quest Bot - Core Package

- database: motor-backed document store
- helpers: time and referral utilities
- constants: user-facing texts and callback ids
"""
