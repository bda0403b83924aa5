# Market evidence engine
