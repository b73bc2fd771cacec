# Sampling stages: decoding, aggregation, traversal
