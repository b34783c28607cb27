import sys
import time

import tordesc.descriptor


def measure_average_advertised_bandwidth(path):
  start_time = time.time()
  total_bw, count, rejected = 0, 0, 0

  for result in tordesc.descriptor.parse_file(path):
    if not result.is_ok():
      rejected += 1
      continue

    desc = result.descriptor
    total_bw += min(desc.average_bandwidth, desc.burst_bandwidth, desc.observed_bandwidth)
    count += 1

  runtime = time.time() - start_time
  print("Finished measure_average_advertised_bandwidth('%s')" % path)
  print('  Total time: %i seconds' % runtime)
  print('  Processed server descriptors: %i' % count)
  print('  Rejected server descriptors: %i' % rejected)

  if count:
    print('  Average advertised bandwidth: %i' % (total_bw / count))
    print('  Time per server descriptor: %0.5f seconds' % (runtime / count))

  print('')


if __name__ == '__main__':
  if len(sys.argv) != 2:
    print('Usage: %s <path to a server descriptor file>' % sys.argv[0])
    sys.exit(1)

  measure_average_advertised_bandwidth(sys.argv[1])
