"""Affiliate wager leaderboards built from Rainbet and X.FUN data."""
