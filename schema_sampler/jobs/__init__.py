# Runnable jobs
