"""Login With VK: OAuth2 callback handling and local account binding."""
