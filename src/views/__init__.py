from .controller import ViewController

__all__ = ["ViewController"]
