"""Community recognition API: nominations, votes and a leaderboard."""
