"""mathematical constants computed once here to avoid recomputation"""
import math

# elo constants
LOG10 = math.log(10.0)
ELO_SCALE = 400.0
ELO_ALPHA = LOG10 / ELO_SCALE

# 538 style margin of victory multiplier
MOV_NUMERATOR = 2.2
MOV_ELO_SCALE = 0.001

# acceptance rates outside this band usually mean a badly tuned proposal
ACCEPTANCE_BAND = (0.1, 0.9)
