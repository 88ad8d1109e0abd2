"""Domain operations shared by the JSON API and the web pages."""
