NAME = "mock-plugins"
