"""Weekly lucky-draw administration: patrons, sign-ins and drawings."""
