ALICE = "alice@example.com"
BOB = "bob@example.com"
CAROL = "carol@example.com"
