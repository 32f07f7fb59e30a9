"""Markov chain Monte Carlo sampling and diagnostics"""
from sportstat.sampling.metropolis import MetropolisHastings, MCMCResult
