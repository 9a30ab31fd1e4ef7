"""NSS Hours - Teilnahme- und Stunden-Freigabe für Freiwilligen-Programme"""
