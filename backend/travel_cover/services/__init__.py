"""Travel Cover - Domain Services"""
