"""colony_sim/interface — input loading, report rendering and the CLI."""
