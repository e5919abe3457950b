"""gputelem quick start: sample every GPU once, then average utilization."""

import gputelem

backend = gputelem.create_backend()

# 1. One-shot: open, sample every device, close
for report in gputelem.collect(backend, gputelem.MetricKind.INSTANTANEOUS_POWER):
    print(gputelem.format_line(report))

# 2. Explicit session: resolve once, sample several metrics
window = gputelem.SampleWindow(sample_count=5, inter_sample_delay_seconds=1)
with gputelem.BackendHandle(gputelem.create_backend()) as session:
    sampler = gputelem.MetricSampler(session, window=window)
    for device in gputelem.DeviceResolver().resolve_all(session):
        util = sampler.sample_averaged_utilization(device, window)
        clock = sampler.sample_frequency(device)
        print(f"{device.name}: {util}% at {clock} MHz")
