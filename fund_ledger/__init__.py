"""Fund trade ledger: atomic batch application of BUY/SELL instructions."""
