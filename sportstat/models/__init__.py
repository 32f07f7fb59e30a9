"""
Models Module
=============

This module contains the statistical models used to rate and evaluate competitors, players and teams.

Included models:
- Elo: A simple and widely used rating system that adjusts ratings based on match outcomes, with optional
  home advantage, margin of victory multiplier and reversion to the mean between seasons.
- RAPM: Regularized adjusted plus-minus, a ridge regression over lineup stints isolating each player's
  contribution to the scoring margin.
- Regression: Linear, logistic and Poisson regression via statsmodels formulas.
- Multilevel: Mixed-effects models with group specific random intercepts (and optionally slopes).
- Hierarchical: A Bayesian hierarchical binomial model fit by MCMC with PyMC.
- Shrinkage: Empirical-Bayes beta-binomial shrinkage of success rates.

The rating systems share the OnlineRatingSystem interface from sportstat.core.base, the regression style
models follow the fit / summarize conventions of the libraries they wrap.
"""
