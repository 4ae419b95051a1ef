"""Super Seed: cliente de compartilhamento com pagamento por peça."""

__version__ = "0.1.0"
