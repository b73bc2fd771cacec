# Persistence of finished snapshots
