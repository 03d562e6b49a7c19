"""colony_sim/shared — data models and the graph shared by core and engine."""
