def pytest_configure(config):
    config.addinivalue_line("markers", "slow: full setup/prove/verify runs on the pure-Python pairing backend")
