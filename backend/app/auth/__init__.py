"""Session tokens, GitHub OAuth and the identity gate."""
