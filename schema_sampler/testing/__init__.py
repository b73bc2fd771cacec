# Tests for the schema sampler; run with pytest
