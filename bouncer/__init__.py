# ABOUTME: Admission decision engine for the capacity-constrained venue game
# ABOUTME: Strategies, engine math, protocol clients and runners live in subpackages

__version__ = "1.0.0"
