import sys
from loopfield_jax.config import config_from_inputs
from loopfield_jax.utils import parse_namelist

if __name__ == "__main__":
    nml = parse_namelist(sys.argv[1], "loopfield_nml")
    for k in sorted(nml.keys()):
        print(k, "=", nml[k])
    print(config_from_inputs(nml))
