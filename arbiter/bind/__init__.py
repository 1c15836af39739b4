"""Contract binding generation with forge, naming and pruning."""